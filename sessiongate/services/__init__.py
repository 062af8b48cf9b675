"""
SessionGate — Services Layer
=============================

What:  The admission logic, independent of any HTTP request object.
Why:   The decision rule is small but security-critical; it must be testable
       with plain dicts and mocks.

Service Inventory:
    - SessionStateStore:       principal presence over a session mapping
    - ActionExemptionRegistry: per-controller action table and unauthorized mode
    - AuthenticationGate:      accept / redirect / 401 for one dispatched action
    - Pipeline, GateResults:   abstract collaborators supplied by the host
"""
