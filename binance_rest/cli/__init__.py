"""
CLI Module
"""
