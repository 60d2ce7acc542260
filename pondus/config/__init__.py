"""Runtime configuration: settings file, environment and API keys."""
