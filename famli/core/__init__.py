"""Core building blocks shared by the API, services and scripts."""
