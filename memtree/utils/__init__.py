"""Logging, validation and benchmark helpers"""
