"""Parsing configuration and the workers that export blocks."""