"""
RoomBridge - multi-tenant chat backend.

Rooms keyed by phone, live presence over Socket.IO, a merged chat + WhatsApp
timeline, and contact fan-out.
"""
