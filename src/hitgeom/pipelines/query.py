from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from hitgeom.config.load import load_config
from hitgeom.config.schemas import Config, HitCfg
from hitgeom.geometry.engine import HitGeometryEngine
from hitgeom.geometry.volumes import AnyVolume, make_volume
from hitgeom.physics.collection import HitCollection

logger = logging.getLogger(__name__)


def collection_from_cfg(hits: list[HitCfg]) -> HitCollection:
    coll = HitCollection()
    for h in hits:
        coll.add_hit(h.position, h.energy, h.time, h.type)
    return coll


def evaluate_volume(
    engine: HitGeometryEngine,
    collection: HitCollection,
    volume: AnyVolume,
) -> Dict[str, Any]:
    """
    Every containment and boundary-distance metric for one volume.

    Distances are -1.0 and ``mean_position`` is NaN when nothing is inside.
    """
    return {
        "count": engine.count_inside(collection, volume),
        "any": engine.any_inside(collection, volume),
        "all": engine.all_inside(collection, volume),
        "energy": engine.total_energy_inside(collection, volume),
        "mean_position": engine.mean_position_inside(collection, volume).tolist(),
        "wall": engine.distance_to_wall(collection, volume),
        "top": engine.distance_to_top(collection, volume),
        "bottom": engine.distance_to_bottom(collection, volume),
    }


def run_queries(
    cfg: Union[Config, str, Path],
    collection: Optional[HitCollection] = None,
    *,
    engine: Optional[HitGeometryEngine] = None,
) -> Dict[str, Any]:
    """
    Evaluate every configured volume against a hit collection.

    Parameters
    ----------
    cfg : Config | path
        Parsed config or path to a TOML config file.
    collection : HitCollection, optional
        Hits to query. Built from ``cfg.hits`` when omitted. When
        ``run.sort`` or ``run.shuffle_iterations`` are set the collection
        is reordered in place.

    Returns
    -------
    dict with ``n_hits``, ``total_energy``, ``extent`` and a ``volumes``
    mapping of volume name -> metrics (see ``evaluate_volume``).
    """
    if not isinstance(cfg, Config):
        cfg_path = cfg
        cfg = load_config(cfg_path)
        if cfg.run.diagnostics_level >= 1:
            logger.info("[run] config = %s", cfg_path)

    diag_level = cfg.run.diagnostics_level
    engine = engine or HitGeometryEngine()
    if collection is None:
        collection = collection_from_cfg(cfg.hits)

    if cfg.run.sort:
        engine.sort_by(collection)
    if cfg.run.shuffle_iterations > 0:
        rng = np.random.default_rng(cfg.run.seed)
        engine.shuffle(collection, cfg.run.shuffle_iterations, rng)
        if diag_level >= 2:
            logger.info("[run] shuffled %d hits with %d swaps (seed=%s)",
                        collection.count(), cfg.run.shuffle_iterations, cfg.run.seed)

    report: Dict[str, Any] = {
        "n_hits": collection.count(),
        "total_energy": engine.total_deposited_energy(collection),
        "extent": engine.extent(collection).as_tuple(),
        "volumes": {},
    }
    if diag_level >= 1:
        logger.info("[pipeline] %d hits, %.3f keV total, %d volumes",
                    report["n_hits"], report["total_energy"], len(cfg.volumes))

    for vcfg in cfg.volumes:
        volume = make_volume(vcfg)
        metrics = evaluate_volume(engine, collection, volume)
        report["volumes"][vcfg.name] = metrics
        if diag_level >= 2:
            logger.info("[volume] %s: count=%d energy=%.3f wall=%.3f",
                        vcfg.name, metrics["count"], metrics["energy"], metrics["wall"])

    return report
