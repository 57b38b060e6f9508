"""Bundled command definitions (JSON)"""
