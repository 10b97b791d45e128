"""Planet Fatness Gym activity API."""
