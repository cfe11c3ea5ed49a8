"""
Event tracker server bootstrap.
"""
