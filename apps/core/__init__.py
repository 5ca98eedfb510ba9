# apps/core/__init__.py

"""
Core - Models e serviços base do Kanboard
"""
