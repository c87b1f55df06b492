"""DDL Toolkit command line interface."""
