"""
Actor identity feature module.

Actors are provisioned by the external identity provider; this service only
reads them and manages their role assignments.
"""
