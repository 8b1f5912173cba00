"""
Room Monitor
============

Backend API and polling client for a room sensor (light, temperature,
humidity) dashboard.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading look like?)
- services/  = Workers (store readings, prune old ones, query them)
- routers/   = API endpoints (the doors into our app)
- client/    = Dashboard side (poll the API, trends, stats, gauges)
- main.py    = Puts it all together and starts the server
"""
