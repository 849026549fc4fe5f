"""Request middleware and dependencies"""
