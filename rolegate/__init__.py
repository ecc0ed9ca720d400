"""Role-priority permission engine.

Loads a shared JSON permission document, validates it, and answers access
questions for a resolved principal:

    from rolegate.shared.permissions import PermissionConfigLoader, PermissionEvaluator

    loader = PermissionConfigLoader()
    evaluator = PermissionEvaluator(loader.load())
    evaluator.can_access({"role": "dispatcher"}, "work_orders", "create")
"""

__version__ = "0.1.0"
