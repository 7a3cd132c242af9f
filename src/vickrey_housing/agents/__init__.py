"""Participant population"""
