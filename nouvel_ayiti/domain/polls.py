"""Moteur de vote des sondages.

Un sondage est ouvert (`active=True`) ou fermé; seul un administrateur change cet état. Le moteur
valide l'option contre le jeu d'options courant et délègue l'incrément au dépôt, qui le réalise
atomiquement. Le comportement sur un sondage fermé dépend de la politique configurée
(`POLL_CLOSED_VOTE_POLICY`).
"""

from __future__ import annotations

import math
from typing import Literal

import structlog

from nouvel_ayiti.app.metrics import POLL_VOTES_TOTAL
from nouvel_ayiti.domain.entities import Poll, PollTally
from nouvel_ayiti.domain.errors import NotFound, PollClosed

log = structlog.get_logger(__name__)

ClosedPollPolicy = Literal["accept", "reject"]


def total_votes(results: dict[str, int]) -> int:
    return sum(results.values())


def percentage(results: dict[str, int], option: str) -> int:
    """Pourcentage des votes d'une option, arrondi au demi supérieur; 0 si aucun vote."""
    total = total_votes(results)
    if total == 0:
        return 0
    return math.floor(100 * results.get(option, 0) / total + 0.5)


class PollVotingEngine:
    """Enregistre les votes et calcule les résultats d'un sondage."""

    def __init__(self, store, closed_poll_policy: ClosedPollPolicy = "accept") -> None:
        self.store = store
        self.closed_poll_policy = closed_poll_policy

    def vote(self, poll_id: int, option: str) -> Poll:
        """Ajoute un vote pour `option`.

        Avec la politique `reject`, l'état du sondage est vérifié par le dépôt dans la même
        opération atomique que l'incrément.

        Raises:
            NotFound: sondage absent ou option hors du jeu d'options.
            PollClosed: sondage inactif avec la politique `reject`.
        """
        try:
            updated = self.store.vote(
                poll_id, option, require_active=self.closed_poll_policy == "reject"
            )
        except PollClosed:
            POLL_VOTES_TOTAL.labels("closed").inc()
            log.info("vote_rejected_closed_poll", poll_id=poll_id)
            raise
        if updated is None:
            POLL_VOTES_TOTAL.labels("rejected").inc()
            log.info("vote_rejected", poll_id=poll_id, option=option)
            raise NotFound("Poll not found or invalid option")
        POLL_VOTES_TOTAL.labels("accepted").inc()
        return updated

    @staticmethod
    def tally(poll: Poll) -> PollTally:
        return PollTally(
            poll_id=poll.id,
            total_votes=total_votes(poll.results),
            results=dict(poll.results),
            percentages={opt: percentage(poll.results, opt) for opt in poll.options},
        )
