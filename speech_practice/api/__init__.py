"""API endpoints"""
