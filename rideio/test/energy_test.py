#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import pytest

from rideio import energy
from rideio._types import Trackpoint
from rideio.config import get_settings


def test_power_based():
    estimate = energy.estimate_energy(duration_seconds=3600,
                                      avg_power_watts=200)
    assert estimate.calories == 48
    assert estimate.strategy == 'power'
    assert (estimate.fat_grams, estimate.carb_grams,
            estimate.protein_grams) == (2, 8, 1)


def test_power_wins_over_physics():
    estimate = energy.estimate_energy(duration_seconds=3600,
                                      avg_power_watts=200, distance_km=30,
                                      elevation_gain_m=500)
    assert estimate.calories == 48


def test_physics_based():
    estimate = energy.estimate_energy(duration_seconds=3600, distance_km=30,
                                      elevation_gain_m=300,
                                      rider_mass_kg=70)
    assert estimate.strategy == 'physics'
    assert estimate.calories == energy.calories_from_physics(
        30, 300, 3600, rider_mass_kg=70)
    assert estimate.calories > 0


def test_physics_by_hand():
    # 10 km in 1000 s (10 m/s), flat, still air, 80 kg
    gravitational = 0
    rolling = 0.005 * 80 * 9.8 * 10000
    air = 0.5 * 1.226 * 0.7 * 0.5 * 10**2 * 10000 / 10
    mechanical = (gravitational + rolling + air) / 0.8
    expected = (mechanical * 0.000239 / 0.24
                + 80 * 24 * 1000 / 86400 * 0.000239)

    got = energy.calories_from_physics(10, 0, 1000, rider_mass_kg=80)
    assert got == int(expected + 0.5)


def test_headwind_costs_more():
    still = energy.calories_from_physics(20, 100, 3600, rider_mass_kg=75)
    headwind = energy.calories_from_physics(20, 100, 3600, rider_mass_kg=75,
                                            wind_speed_mps=5,
                                            wind_direction_deg=0)
    tailwind = energy.calories_from_physics(20, 100, 3600, rider_mass_kg=75,
                                            wind_speed_mps=5,
                                            wind_direction_deg=180)
    assert tailwind < still < headwind


def test_default_rider_mass():
    default = get_settings().default_rider_mass_kg
    assert energy.calories_from_physics(20, 100, 3600) \
        == energy.calories_from_physics(20, 100, 3600, rider_mass_kg=default)


def test_zero_rider_mass_is_not_the_default():
    # only air drag is left
    air = 0.5 * 1.226 * 0.7 * 0.5 * 10**2 * 10000 / 10
    expected = air / 0.8 * 0.000239 / 0.24

    got = energy.calories_from_physics(10, 0, 1000, rider_mass_kg=0)
    assert got == int(expected + 0.5)
    assert got < energy.calories_from_physics(10, 0, 1000)


def test_zero_duration():
    estimate = energy.estimate_energy(duration_seconds=0, distance_km=10)
    assert estimate.calories == 0
    assert (estimate.fat_grams, estimate.carb_grams,
            estimate.protein_grams) == (0, 0, 0)


def test_nothing_to_go_on():
    estimate = energy.estimate_energy(duration_seconds=3600)
    assert estimate == energy.EnergyEstimate(0, 0, 0, 0, None)

    estimate = energy.estimate_energy(duration_seconds=3600,
                                      avg_power_watts=0)
    assert estimate.strategy is None


def test_macronutrients_round_half_up():
    assert energy.split_macronutrients(1000) == (33, 163, 13)
    assert energy.split_macronutrients(0) == (0, 0, 0)


def test_average_wind():
    samples = [{'speed': 2, 'direction': 350, 'timestamp': 'a'},
               {'speed': 4, 'direction': 10},
               {'speed': None, 'direction': 90},
               {'direction': 180}]
    assert energy.average_wind(samples) == (3.0, 180.0)
    assert energy.average_wind([]) == (0.0, 0.0)
    assert energy.average_wind(None) == (0.0, 0.0)


def test_route_summary_from_trackpoints():
    trackpoints = [Trackpoint(0, 0, power=p) for p in (100, 0, None, 300)]

    summary = energy.summarize_route_energy(
        duration_seconds=3600, distance_km=25, elevation_gain_m=200,
        trackpoints=trackpoints)

    assert summary.average_power == 200
    assert summary.calories_power_based == 48
    assert summary.calories_estimated == energy.calories_from_physics(
        25, 200, 3600)
    assert summary.fat_grams == 2


def test_route_summary_without_power():
    summary = energy.summarize_route_energy(
        duration_seconds=3600, distance_km=25, elevation_gain_m=200,
        wind_samples=[{'speed': 3, 'direction': 0}])

    assert summary.calories_power_based is None
    assert summary.average_power is None
    assert summary.calories_estimated == energy.calories_from_physics(
        25, 200, 3600, wind_speed_mps=3, wind_direction_deg=0)
    assert summary.carb_grams == pytest.approx(
        summary.calories_estimated * 0.65 / 4, abs=0.5)
