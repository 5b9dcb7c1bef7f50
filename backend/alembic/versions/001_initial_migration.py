"""Initial migration: create tournament, team, match and round tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("game", sa.String(), nullable=False),
        sa.Column("game_mode", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournamentteam",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tag", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "name", name="uq_tournament_team_name"),
    )
    op.create_index("ix_tournamentteam_tournament_id", "tournamentteam", ["tournament_id"])

    op.create_table(
        "tournamentteamplayer",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_team_id", sa.Integer(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_team_id"], ["tournamentteam.id"]),
        sa.UniqueConstraint("tournament_team_id", "player_name", name="uq_team_player_name"),
    )
    op.create_index("ix_tournamentteamplayer_tournament_team_id", "tournamentteamplayer", ["tournament_team_id"])

    op.create_table(
        "tournamentmatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("team1_id", sa.Integer(), nullable=False),
        sa.Column("team2_id", sa.Integer(), nullable=False),
        sa.Column("week", sa.String(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("server_name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["team1_id"], ["tournamentteam.id"]),
        sa.ForeignKeyConstraint(["team2_id"], ["tournamentteam.id"]),
    )
    op.create_index("ix_tournamentmatch_tournament_id", "tournamentmatch", ["tournament_id"])
    op.create_index("ix_tournamentmatch_week", "tournamentmatch", ["week"])

    op.create_table(
        "tournamentmatchmap",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("map_name", sa.String(), nullable=False),
        sa.Column("map_order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["tournamentmatch.id"]),
    )
    op.create_index("ix_tournamentmatchmap_match_id", "tournamentmatchmap", ["match_id"])

    # Written by round ingestion; read-only for the ranking engine
    op.create_table(
        "round",
        sa.Column("round_id", sa.String(), nullable=False),
        sa.Column("server_name", sa.String(), nullable=False),
        sa.Column("map_name", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("team1_label", sa.String(), nullable=True),
        sa.Column("team2_label", sa.String(), nullable=True),
        sa.Column("tickets1", sa.Integer(), nullable=True),
        sa.Column("tickets2", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("round_id"),
    )

    op.create_table(
        "roundplayer",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("round_id", sa.String(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("team_label", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["round_id"], ["round.round_id"]),
    )
    op.create_index("ix_roundplayer_round_id", "roundplayer", ["round_id"])


def downgrade() -> None:
    op.drop_index("ix_roundplayer_round_id", table_name="roundplayer")
    op.drop_table("roundplayer")
    op.drop_table("round")
    op.drop_index("ix_tournamentmatchmap_match_id", table_name="tournamentmatchmap")
    op.drop_table("tournamentmatchmap")
    op.drop_index("ix_tournamentmatch_week", table_name="tournamentmatch")
    op.drop_index("ix_tournamentmatch_tournament_id", table_name="tournamentmatch")
    op.drop_table("tournamentmatch")
    op.drop_index("ix_tournamentteamplayer_tournament_team_id", table_name="tournamentteamplayer")
    op.drop_table("tournamentteamplayer")
    op.drop_index("ix_tournamentteam_tournament_id", table_name="tournamentteam")
    op.drop_table("tournamentteam")
    op.drop_table("tournament")
