"""
SessionGate — Domain Models
============================

What:  Immutable value types describing controllers and their actions.
Why:   The registry, the gate, and the controller helpers all exchange the same
       small set of types; keeping them in one place avoids import cycles.

Model Inventory:
    - UnauthorizedMode:     redirect-to-login vs. 401 policy
    - ActionDescriptor:     one action as declared by a controller
    - ControllerDescriptor: a controller's name plus its ordered actions
    - Action:               one action as recorded by the registry
"""
