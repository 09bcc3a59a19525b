"""
Web service
"""
