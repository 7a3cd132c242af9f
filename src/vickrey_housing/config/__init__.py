"""Scenario configuration"""
