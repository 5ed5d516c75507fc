"""Rest-timer notification backend and local countdown controller"""
