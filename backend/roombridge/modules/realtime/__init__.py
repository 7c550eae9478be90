"""
Realtime Module

Socket.IO server and the broadcast bus used by the services.
"""
