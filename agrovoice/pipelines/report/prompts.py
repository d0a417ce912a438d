"""Prompt construction for the report model.

The user prompt is deterministic for a given request: the payloads are
embedded verbatim as JSON with sorted keys.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from .types import ReportRequest

AGRONOMIST_SYSTEM_PROMPT = """Tu es un agronome expert senior specialise dans le conseil agricole au Maroc et en Afrique du Nord.
Tu analyses avec precision les donnees meteo, sol et topographiques pour fournir des conseils exhaustifs, professionnels et actionnables.

CONTEXTE:
- Tu recois des donnees reelles (meteo actuelle et previsions, analyse de sol, topographie)
- Les agriculteurs comptent sur tes conseils pour optimiser leurs cultures et proteger leurs recoltes
- Tes analyses doivent etre completes, detaillees et scientifiquement fondees

FORMAT DE REPONSE (JSON strict):
{
  "status": "normal" | "vigilance" | "alerte",
  "summary": "Synthese en 5-6 phrases: etat general de la parcelle, conditions meteo dominantes, 2-3 risques principaux, priorites d'action immediates.",
  "weatherAnalysis": "Analyse meteo en 6-8 phrases: temperature, humidite, precipitations, vent, UV, previsions 7 jours.",
  "soilAnalysis": "Analyse pedologique en 5-7 phrases: texture, pH, nutriments, carbone organique, amendements avec doses.",
  "recommendations": [
    "Recommandation 1 - action immediate avec produit, dose et methode",
    "Recommandation 2 - action preventive avec details techniques",
    "Recommandation 3 - gestion de l'eau/irrigation avec volumes"
  ],
  "diseaseRisk": {
    "level": "low" | "medium" | "high",
    "diseases": ["Maladie - probabilite estimee selon humidite/temperature"],
    "preventiveActions": ["Action preventive - produit, dose, moment optimal"]
  },
  "irrigationAdvice": "Conseil d'irrigation en 4-5 phrases: besoin hydrique (mm/jour), ETo et Kc, frequence et volume, methode, fenetre horaire.",
  "nextActions": [
    {"action": "Action concrete avec quantite", "priority": "high" | "medium" | "low", "timing": "Aujourd'hui"}
  ],
  "weeklyForecast": "Previsions agronomiques sur 7 jours en 5-6 phrases."
}

REGLES ABSOLUES:
- "status" vaut exactement "normal", "vigilance" ou "alerte"
- "summary" n'est jamais vide et "recommendations" contient au moins une entree
- Integre des valeurs numeriques precises (doses, volumes, seuils, pourcentages)
- Chaque recommandation doit etre executable, pas de conseils vagues
- Si les donnees sol sont estimees, le mentionner et recommander une analyse en laboratoire
- Reponds uniquement avec l'objet JSON"""


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2, default=str)


def _parcelle_lines(parcelle: Any) -> list[str]:
    if not isinstance(parcelle, Mapping):
        return [f"- Identifiant: {parcelle}"]

    lines = [f"- Nom: {parcelle.get('name', parcelle.get('id', 'N/A'))}"]
    culture = parcelle.get("culture")
    if isinstance(culture, Mapping) and culture.get("type"):
        lines.append(f"- Culture: {culture['type']}")
    if parcelle.get("areaHectares") is not None:
        lines.append(f"- Surface: {parcelle['areaHectares']} hectares")
    centroid = parcelle.get("centroid")
    if isinstance(centroid, Mapping) and {"lat", "lng"} <= centroid.keys():
        lines.append(f"- Coordonnees GPS: {centroid['lat']}N, {centroid['lng']}E")
    return lines


def _soil_heading(soil: Any) -> str:
    if isinstance(soil, Mapping) and soil.get("isEstimated"):
        return "DONNEES PEDOLOGIQUES (ESTIMEES, non mesurees sur site):"
    return "DONNEES PEDOLOGIQUES:"


def build_report_prompt(request: ReportRequest) -> str:
    """Render the request-specific user prompt."""

    sections = [
        "Analyse cette parcelle agricole et genere un rapport agronomique COMPLET, DETAILLE et PROFESSIONNEL.",
        "Chaque phrase doit etre ancree dans les donnees reelles fournies ci-dessous.",
        "",
        "PARCELLE:",
        *_parcelle_lines(request.parcelle),
        _dump(request.parcelle),
        "",
        "METEO ACTUELLE ET PREVISIONS:",
        _dump(request.weather),
        "",
        _soil_heading(request.soil),
        _dump(request.soil),
        "",
        "TOPOGRAPHIE:",
        _dump(request.elevation),
        "",
        "Genere maintenant le rapport JSON.",
    ]
    return "\n".join(sections)


__all__ = ["AGRONOMIST_SYSTEM_PROMPT", "build_report_prompt"]
