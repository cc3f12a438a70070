"""Realtime server for the Nomi, Cose, Città party word game."""
