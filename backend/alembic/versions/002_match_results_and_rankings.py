"""Add tournament match results and team rankings

Revision ID: 002_results_rankings
Revises: 001_initial
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "002_results_rankings"
down_revision = "001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tournamentmatchresult",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("map_id", sa.Integer(), nullable=False),  # no FK: orphans are cleaned up explicitly
        sa.Column("round_id", sa.String(), nullable=True),
        sa.Column("week", sa.String(), nullable=True),
        sa.Column("team1_id", sa.Integer(), nullable=True),
        sa.Column("team2_id", sa.Integer(), nullable=True),
        sa.Column("winning_team_id", sa.Integer(), nullable=True),
        sa.Column("team1_tickets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("team2_tickets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["match_id"], ["tournamentmatch.id"]),
        sa.ForeignKeyConstraint(["round_id"], ["round.round_id"]),
        sa.ForeignKeyConstraint(["team1_id"], ["tournamentteam.id"]),
        sa.ForeignKeyConstraint(["team2_id"], ["tournamentteam.id"]),
        sa.ForeignKeyConstraint(["winning_team_id"], ["tournamentteam.id"]),
    )
    op.create_index("ix_tournamentmatchresult_tournament_id", "tournamentmatchresult", ["tournament_id"])
    op.create_index("ix_tournamentmatchresult_match_id", "tournamentmatchresult", ["match_id"])
    op.create_index("ix_tournamentmatchresult_map_id", "tournamentmatchresult", ["map_id"])
    op.create_index("ix_tournamentmatchresult_week", "tournamentmatchresult", ["week"])

    op.create_table(
        "tournamentteamranking",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("week", sa.String(), nullable=True),
        sa.Column("rounds_won", sa.Integer(), nullable=False),
        sa.Column("rounds_tied", sa.Integer(), nullable=False),
        sa.Column("rounds_lost", sa.Integer(), nullable=False),
        sa.Column("ticket_differential", sa.Integer(), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False),
        sa.Column("victories", sa.Integer(), nullable=False),
        sa.Column("ties", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("tickets_for", sa.Integer(), nullable=False),
        sa.Column("tickets_against", sa.Integer(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["tournamentteam.id"]),
        sa.UniqueConstraint("tournament_id", "team_id", "week", name="uq_ranking_team_week"),
    )
    op.create_index("ix_tournamentteamranking_tournament_id", "tournamentteamranking", ["tournament_id"])
    op.create_index("ix_tournamentteamranking_week", "tournamentteamranking", ["week"])


def downgrade() -> None:
    op.drop_index("ix_tournamentteamranking_week", table_name="tournamentteamranking")
    op.drop_index("ix_tournamentteamranking_tournament_id", table_name="tournamentteamranking")
    op.drop_table("tournamentteamranking")
    op.drop_index("ix_tournamentmatchresult_week", table_name="tournamentmatchresult")
    op.drop_index("ix_tournamentmatchresult_map_id", table_name="tournamentmatchresult")
    op.drop_index("ix_tournamentmatchresult_match_id", table_name="tournamentmatchresult")
    op.drop_index("ix_tournamentmatchresult_tournament_id", table_name="tournamentmatchresult")
    op.drop_table("tournamentmatchresult")
