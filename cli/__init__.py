"""Command-line interface for the Storj-Fluree connector."""
