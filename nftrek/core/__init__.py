"""
Core mint pipeline: data model, location, request building and orchestration.

Import from the submodules directly, e.g. ``from nftrek.core.orchestrator
import MintOrchestrator``; the orchestrator depends on the integrations
package, which in turn depends on ``nftrek.core.models``.
"""
