"""Adapters binding domain ports to concrete gateways."""
