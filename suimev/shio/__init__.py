"""Shio auction feed messages, connection, collector and bid executors."""