"""Local reconciling cache: a pure reducer (`state`) plus its effect layer (`cache`)."""

from cinelist.client.store.cache import EffectResult, LocalReconcilingCache
from cinelist.client.store.state import CacheState, reduce

__all__ = ["CacheState", "EffectResult", "LocalReconcilingCache", "reduce"]
