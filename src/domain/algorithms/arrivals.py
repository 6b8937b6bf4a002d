from __future__ import annotations

from typing import Mapping, Sequence

from src.domain.models import (
    ApproachingVehicle,
    ArrivalEstimate,
    ArrivalStatus,
    GeoPoint,
    LiveVehicleAtStop,
    TrafficSegment,
    VehicleStatus,
)
from src.domain.models.stop import base_stop_code, normalize_stop_code

from .duration import leg_duration, path_distance_km

DISPLAY_LIMIT = 2


def find_stop_index(stop_ids: Sequence[str], target: str) -> int | None:
    """Position of `target` in a feed's stop list.

    Feeds spell codes differently ("M11-1" vs "M11_1"), so an exact normalized
    match wins and a base-code match is the fallback.
    """

    wanted = normalize_stop_code(target)
    for i, code in enumerate(stop_ids):
        if normalize_stop_code(code) == wanted:
            return i

    wanted_base = base_stop_code(target)
    for i, code in enumerate(stop_ids):
        if base_stop_code(code) == wanted_base:
            return i
    return None


def estimate_arrivals(
    points: Sequence[GeoPoint | None],
    target_index: int,
    vehicles_by_stop_index: Mapping[int, Sequence[LiveVehicleAtStop]],
    traffic: Sequence[TrafficSegment] | None = None,
    *,
    stop_ids: Sequence[str] | None = None,
    display_limit: int = DISPLAY_LIMIT,
) -> ArrivalEstimate:
    """Vehicles approaching stop `target_index`, nearest first.

    - At the target: only vehicles still at the stop count.
    - Departed from the stop right before the target: en route, ETA 0.
    - Anywhere earlier: ETA from the duration model over [i, target].
    """

    if target_index < 0 or target_index >= len(points):
        return ArrivalEstimate(target_index=target_index, display_limit=display_limit)

    found: list[ApproachingVehicle] = []
    for i in range(0, target_index + 1):
        vehicles = vehicles_by_stop_index.get(i) or ()
        if not vehicles:
            continue

        current = stop_ids[i] if stop_ids and i < len(stop_ids) else None
        distance_m = int(round(path_distance_km(points, i, target_index) * 1000.0))
        eta = leg_duration(points, i, target_index, traffic)

        for vehicle in vehicles:
            if i == target_index:
                if vehicle.status is not VehicleStatus.AT_STOP:
                    continue
                found.append(
                    ApproachingVehicle(
                        plate=vehicle.plate,
                        stop_index=i,
                        current_stop_id=current,
                        stops_away=0,
                        eta_min=0,
                        distance_m=0,
                    )
                )
            elif i == target_index - 1 and vehicle.status is VehicleStatus.DEPARTED:
                found.append(
                    ApproachingVehicle(
                        plate=vehicle.plate,
                        stop_index=i,
                        current_stop_id=current,
                        stops_away=0,
                        eta_min=0,
                        distance_m=distance_m,
                        en_route=True,
                    )
                )
            else:
                found.append(
                    ApproachingVehicle(
                        plate=vehicle.plate,
                        stop_index=i,
                        current_stop_id=current,
                        stops_away=target_index - i,
                        eta_min=eta,
                        distance_m=distance_m,
                    )
                )

    found.sort(key=lambda v: v.eta_min)
    return ArrivalEstimate(
        target_index=target_index,
        approaching=tuple(found),
        display_limit=display_limit,
    )


def arrival_status(estimate: ArrivalEstimate, vehicles_on_route: int) -> ArrivalStatus:
    nearest = estimate.min_stops_away
    if nearest == 0:
        return ArrivalStatus.ARRIVING
    if nearest is not None:
        return ArrivalStatus.ACTIVE
    if vehicles_on_route > 0:
        return ArrivalStatus.NO_APPROACHING
    return ArrivalStatus.NO_SERVICE
