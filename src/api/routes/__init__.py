"""
API Routes - HTTP endpoint handlers

Routes receive HTTP requests, validate them, call SimulatorService,
and return HTTP responses. Each area (pins, groups, scenarios, presets,
diagnostics, system) gets its own router, all mounted under /api/v1.
"""
