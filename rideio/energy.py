#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Energy expenditure and macronutrient estimates for a ride.

Two strategies, tried in order:

    1. power-based, from average power and duration;
    2. physics-based, from distance, elevation gain, rider mass and wind
       (only when there is no power data and the distance is positive).

Whichever wins is split into grams of fat, carbohydrate and protein.
Missing inputs never raise: no power falls through to physics, no wind is
still air, no rider mass is the configured default.

"""
from collections import namedtuple
from math import cos, radians
import logging

from rideio import tools
from rideio.config import get_settings


logger = logging.getLogger(__name__)

# power-based
POWER_KCAL_FACTOR = 0.24        # kcal per watt-hour
SECONDS_PER_HOUR = 3600

# physics-based
GRAVITY = 9.8                   # m/s^2
ROLLING_RESISTANCE = 0.005
AIR_DENSITY = 1.226             # kg/m^3
DRAG_COEFFICIENT = 0.7
FRONTAL_AREA = 0.5              # m^2
MECHANICAL_EFFICIENCY = 0.8
JOULES_TO_KCAL = 0.000239
METABOLIC_EFFICIENCY = 0.24
BASE_METABOLIC_FACTOR = 24      # per kg per day; a flat proxy, no age/sex
SECONDS_PER_DAY = 86400

# macronutrient split: (share of calories, kcal per gram)
MACRONUTRIENTS = {
    'fat_grams': (0.30, 9),
    'carb_grams': (0.65, 4),
    'protein_grams': (0.05, 4),
}

POWER, PHYSICS = 'power', 'physics'


EnergyEstimate = namedtuple(
    'EnergyEstimate',
    ('calories', 'fat_grams', 'carb_grams', 'protein_grams', 'strategy'))

Macronutrients = namedtuple(
    'Macronutrients', ('fat_grams', 'carb_grams', 'protein_grams'))

RouteEnergySummary = namedtuple(
    'RouteEnergySummary',
    ('calories_power_based', 'calories_estimated', 'fat_grams', 'carb_grams',
     'protein_grams', 'average_power'))


def _positive(value):
    return value is not None and value > 0


def calories_from_power(avg_power_watts, duration_seconds):
    """kcal from average power, or None if either input is unusable.

        >>> calories_from_power(200, 3600)
        48.0
    """
    if not (_positive(avg_power_watts) and _positive(duration_seconds)):
        return None
    return (avg_power_watts * duration_seconds * POWER_KCAL_FACTOR
            / SECONDS_PER_HOUR)


def calories_from_physics(distance_km, elevation_gain_m, duration_seconds, *,
                          rider_mass_kg=None, wind_speed_mps=None,
                          wind_direction_deg=None):
    """kcal from the work done against gravity, rolling resistance and air.

    Parameters
    ----------
    distance_km : float
    elevation_gain_m : float
        Total ascent; None counts as flat.
    duration_seconds : float
    rider_mass_kg : float, optional
        Defaults to the ``default_rider_mass_kg`` setting.
    wind_speed_mps, wind_direction_deg : float, optional
        Average wind; the component along ``cos(direction)`` is added to
        the rider's speed for the drag term. Missing means still air.

    Returns
    -------
    int
        Zero when the distance or duration isn't positive.
    """
    if not (_positive(distance_km) and _positive(duration_seconds)):
        return 0

    mass = rider_mass_kg
    if mass is None:
        mass = get_settings().default_rider_mass_kg
    distance_m = distance_km * 1000
    avg_speed = distance_m / duration_seconds

    gravitational = mass * GRAVITY * (elevation_gain_m or 0)
    rolling = ROLLING_RESISTANCE * mass * GRAVITY * distance_m

    headwind = (wind_speed_mps or 0) * cos(radians(wind_direction_deg or 0))
    effective_speed = avg_speed + headwind
    air = (0.5 * AIR_DENSITY * DRAG_COEFFICIENT * FRONTAL_AREA
           * effective_speed**2 * distance_m / avg_speed)

    mechanical = (gravitational + rolling + air) / MECHANICAL_EFFICIENCY
    from_work = mechanical * JOULES_TO_KCAL / METABOLIC_EFFICIENCY
    base_metabolic = (mass * BASE_METABOLIC_FACTOR
                      * duration_seconds / SECONDS_PER_DAY * JOULES_TO_KCAL)

    return tools.round_half_up(from_work + base_metabolic)


def split_macronutrients(calories):
    """Grams of fat, carbohydrate and protein for a calorie total.

    Each is rounded on its own; the rounding error isn't redistributed.

        >>> split_macronutrients(1000)
        Macronutrients(fat_grams=33, carb_grams=163, protein_grams=13)
    """
    if not _positive(calories):
        return Macronutrients(0, 0, 0)
    return Macronutrients(**{
        name: tools.round_half_up(calories * share / kcal_per_gram)
        for name, (share, kcal_per_gram) in MACRONUTRIENTS.items()})


def estimate_energy(*, duration_seconds, avg_power_watts=None,
                    distance_km=None, elevation_gain_m=None,
                    rider_mass_kg=None, wind_speed_mps=None,
                    wind_direction_deg=None):
    """Estimate calories burned and the macronutrients behind them.

    Returns
    -------
    EnergyEstimate
        ``strategy`` is ``'power'``, ``'physics'`` or None when neither had
        enough to go on (in which case everything is zero).
    """
    calories = calories_from_power(avg_power_watts, duration_seconds)
    strategy = POWER

    if calories is None:
        if _positive(distance_km):
            calories = calories_from_physics(
                distance_km, elevation_gain_m, duration_seconds,
                rider_mass_kg=rider_mass_kg, wind_speed_mps=wind_speed_mps,
                wind_direction_deg=wind_direction_deg)
            strategy = PHYSICS
        else:
            calories, strategy = 0, None

    calories = tools.round_half_up(calories)
    logger.debug('estimated %d kcal (%s)', calories, strategy)
    return EnergyEstimate(calories, *split_macronutrients(calories),
                          strategy=strategy)


def average_wind(samples):
    """Average ``{speed, direction}`` wind samples.

    Speeds (m/s) and directions (degrees) are each averaged arithmetically.
    Samples lacking either number are ignored.

    Returns
    -------
    (float, float)
        ``(0.0, 0.0)`` when there is nothing usable.
    """
    speeds, directions = [], []
    for sample in samples or ():
        speed, direction = sample.get('speed'), sample.get('direction')
        if isinstance(speed, (int, float)) and isinstance(direction, (int, float)):
            speeds.append(speed)
            directions.append(direction)

    if not speeds:
        return 0.0, 0.0
    return tools.mean_of(speeds), tools.mean_of(directions)


def summarize_route_energy(*, duration_seconds, distance_km=None,
                           elevation_gain_m=None, average_power=None,
                           trackpoints=None, rider_mass_kg=None,
                           wind_samples=None):
    """Everything a route stores about its energy cost.

    Both estimates are computed; the power-based one (when available) is
    the one the macronutrients are derived from.

    Parameters
    ----------
    average_power : float, optional
        Falls back to the mean of the positive power readings in
        `trackpoints`.
    wind_samples : iterable of dict, optional
        Weather samples, see `average_wind`.

    Returns
    -------
    RouteEnergySummary
    """
    if average_power is None and trackpoints:
        average_power = tools.mean_of(
            [tp.power for tp in trackpoints
             if tp.power is not None and tp.power > 0])

    wind_speed, wind_direction = average_wind(wind_samples)

    power_based = calories_from_power(average_power, duration_seconds)
    if power_based is not None:
        power_based = tools.round_half_up(power_based)

    estimated = calories_from_physics(
        distance_km, elevation_gain_m, duration_seconds,
        rider_mass_kg=rider_mass_kg, wind_speed_mps=wind_speed,
        wind_direction_deg=wind_direction)

    total = power_based if power_based is not None else estimated
    return RouteEnergySummary(power_based, estimated,
                              *split_macronutrients(total),
                              average_power=average_power)
