"""
Dinnerwise - AI recipe suggestions from whatever is in the pantry.

Example:
    >>> from dinnerwise.domains.inference import InferenceOrchestrator, InferenceRequest, Plan
    >>> orchestrator = InferenceOrchestrator.from_settings(settings, transport, ledger)
    >>> result = await orchestrator.resolve(
    ...     InferenceRequest(ingredients=["rice", "eggs"], tenant_id="t-1", plan=Plan.PRO)
    ... )
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
