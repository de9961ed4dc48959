"""
Backend package for the shop demo API.

This package provides a FastAPI application exposing users, tasks, products
and baskets over REST and GraphQL, with a document store abstraction and
seed utilities for demos and tests.
"""
