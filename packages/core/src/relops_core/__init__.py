"""Release workflow automation: build status, repository sync and CI comments."""
