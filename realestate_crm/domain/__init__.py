"""Dominio: entidades de auditoría y puertos de persistencia."""
