"""HTTP server exposing the onboarding wizard."""
