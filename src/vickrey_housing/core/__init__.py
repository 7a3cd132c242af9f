"""Shared types, random sampling and errors"""
