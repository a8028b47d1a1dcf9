"""Human readable rendering of search results (Norwegian wording)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Dict, List, Optional, Sequence

from .entities import ForecastStep, RankedCandidate, ScoredCandidate, SearchResult

FORECAST_HOURS = 24

# Upper bounds in m/s.
BEAUFORT_SCALE = (
    (0.3, "stille"),
    (1.6, "flau vind"),
    (3.4, "lett bris"),
    (5.5, "svak bris"),
    (8.0, "laber bris"),
    (10.8, "frisk bris"),
    (13.9, "liten kuling"),
    (17.2, "stiv kuling"),
    (20.8, "sterk kuling"),
    (24.5, "liten storm"),
    (28.5, "full storm"),
    (32.7, "sterk storm"),
)
HURRICANE = "orkan"

COMPASS_NAMES = ("nord", "nordøst", "øst", "sørøst", "sør", "sørvest", "vest", "nordvest")
# Arrows point where the wind blows to, i.e. opposite the "from" direction.
WIND_ARROWS = ("↓", "↙", "←", "↖", "↑", "↗", "→", "↘")


def beaufort_name(speed: float) -> str:
    for upper, name in BEAUFORT_SCALE:
        if speed < upper:
            return name
    return HURRICANE


def _sector(degrees: float) -> int:
    return int((degrees % 360 + 22.5) // 45) % 8


def wind_direction_name(degrees: float) -> str:
    return COMPASS_NAMES[_sector(degrees)]


def wind_arrow(degrees: float) -> str:
    return WIND_ARROWS[_sector(degrees)]


@dataclass(frozen=True)
class ForecastRow:
    time: str
    symbol: str
    temperature: str
    precipitation: str
    wind: str
    description: str


def forecast_rows(
    forecast: Sequence[ForecastStep],
    hours: int = FORECAST_HOURS,
    tz: Optional[tzinfo] = None,
) -> List[ForecastRow]:
    rows: List[ForecastRow] = []
    for step in forecast[:hours]:
        local = step.time.astimezone(tz)
        wind = ""
        description = ""
        if step.wind_speed is not None:
            wind = f"{step.wind_speed:.0f}"
            if step.wind_gust is not None:
                wind += f", {step.wind_gust:.0f}"
            description = beaufort_name(step.wind_speed)
            if step.wind_from_direction is not None:
                wind += f" {wind_arrow(step.wind_from_direction)}"
                description += f" fra {wind_direction_name(step.wind_from_direction)}"
        rows.append(
            ForecastRow(
                time=local.strftime("%H:%M"),
                symbol=step.symbol_code or "unknown",
                temperature="" if step.temperature is None else f"{step.temperature:g}°",
                precipitation="" if step.precipitation_amount is None else f"{step.precipitation_amount:.1f}",
                wind=wind,
                description=description,
            )
        )
    return rows


def format_result(result: SearchResult, tz: Optional[tzinfo] = None) -> str:
    best = result.best
    obs = best.candidate.observation
    lines = [
        f"Beste sted: {best.name} ({best.candidate.lat:.5f}, {best.candidate.lon:.5f})",
        f"Score: {best.candidate.score * 100:.1f}%",
        f"Temperatur: {obs.temp:.1f}°C",
        f"Skydekke: {obs.cloud_fraction:.0f}%",
    ]
    wind_line = f"Vind: {obs.wind_speed:.1f} m/s"
    if obs.wind_gust is not None:
        wind_line += f" - kast: {obs.wind_gust:.1f} m/s"
    lines.append(wind_line)
    lines.append("")
    lines.append("Topp 3:")
    for spot in result.top:
        lines.append(_format_spot(spot))
    lines.append("")
    lines.append(f"Værmelding (neste {FORECAST_HOURS} timer):")
    for row in forecast_rows(best.forecast, tz=tz):
        lines.append(
            f"{row.time}  {row.symbol:<24} {row.temperature:>6} {row.precipitation:>5}  {row.wind:<10} {row.description}"
        )
    lines.append("")
    lines.append(f"{result.evaluated} punkter vurdert, {result.skipped} hoppet over")
    return "\n".join(lines)


def _format_spot(spot: RankedCandidate) -> str:
    c = spot.candidate
    obs = c.observation
    return (
        f"#{spot.rank} {spot.name}: {c.score * 100:.1f}% | {obs.temp:.1f}°C | "
        f"{100 - obs.cloud_fraction:.0f}% klart | {obs.wind_speed:.1f} m/s"
    )


def _candidate_dict(candidate: ScoredCandidate) -> Dict[str, Any]:
    obs = candidate.observation
    return {
        "lat": candidate.lat,
        "lon": candidate.lon,
        "score": candidate.score,
        "temp": obs.temp,
        "cloud": obs.cloud_fraction,
        "wind": obs.wind_speed,
        "gust": obs.wind_gust,
        "symbol_code": obs.symbol_code,
    }


def result_to_dict(result: SearchResult) -> Dict[str, Any]:
    best = dict(_candidate_dict(result.best.candidate), name=result.best.name)
    best["forecast"] = [
        {
            "time": step.time.isoformat().replace("+00:00", "Z"),
            "temperature": step.temperature,
            "cloud_fraction": step.cloud_fraction,
            "wind_speed": step.wind_speed,
            "wind_gust": step.wind_gust,
            "wind_from_direction": step.wind_from_direction,
            "symbol_code": step.symbol_code,
            "precipitation_amount": step.precipitation_amount,
        }
        for step in result.best.forecast
    ]
    return {
        "best": best,
        "top": [dict(_candidate_dict(spot.candidate), name=spot.name, rank=spot.rank) for spot in result.top],
        "evaluated": result.evaluated,
        "skipped": result.skipped,
    }


__all__ = [
    "beaufort_name",
    "wind_direction_name",
    "wind_arrow",
    "ForecastRow",
    "forecast_rows",
    "format_result",
    "result_to_dict",
]
