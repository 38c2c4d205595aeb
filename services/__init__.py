"""Scheduler core: credential store, class repository, access policy, expiry sweeper.

Import the submodules directly (services.repository, services.sweeper, ...).
"""
