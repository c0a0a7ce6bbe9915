"""Maintenance schedule — events of the maintenance table and their dashboard views.

Flow: AccessGate unlocks writes → FormController edits a draft →
EventStore writes it and reloads the whole table → normalizer reshapes
the rows → projector derives day groups and stats for the dashboard.

Integration points:
  1. main.py: build the row store, EventStore, AccessGate; include router
  2. core/websocket.py: store listener publishes every reload
"""
