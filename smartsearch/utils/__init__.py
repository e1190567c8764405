"""Shared utilities: error responses and logging setup"""
