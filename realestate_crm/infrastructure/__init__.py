"""Infraestructura: DB y repositorios."""
