"""Identidad: usuarios, roles, scoping, tokens y gate."""
