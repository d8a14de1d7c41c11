"""Pydantic schemas for requests, responses and the response envelope."""
