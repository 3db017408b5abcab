"""CLI package for cloud-auth."""
