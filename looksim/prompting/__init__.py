"""Prompt construction package for hairstyle generation requests."""
