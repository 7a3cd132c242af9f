"""Dwelling stock"""
