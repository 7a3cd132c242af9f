"""Vickrey batch auction"""
