"""Content blocks service"""
