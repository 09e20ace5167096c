from enum import StrEnum


class Failure(StrEnum):
    """Échecs attendus renvoyés par le domaine (jamais levés)."""

    NOT_FOUND = "not-found"
    # Le tap ne distingue pas "joueur inconnu" de "plus d'énergie": les deux
    # cas sortent ici et doivent être traités pareil par les appelants.
    NO_ENERGY_OR_NOT_FOUND = "no-energy-or-not-found"
    ALREADY_COMPLETED = "already-completed"
    NOT_READY = "not-ready"
    DUPLICATE = "duplicate"
