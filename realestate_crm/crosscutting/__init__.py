"""Crosscutting: config, logging, errores, middleware, rate limit."""
