"""Initial schema — chains, groups, nodes, fronts, front/group mappings, contracts.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("modify_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _chain_fk() -> sa.ForeignKey:
    return sa.ForeignKey("tb_chain.chain_id", ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "tb_chain",
        sa.Column("chain_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("chain_name", sa.String(120), nullable=False, unique=True),
        sa.Column("chain_desc", sa.String(1024), nullable=True),
        sa.Column("version", sa.String(64), nullable=False, server_default=""),
        sa.Column("encrypt_type", sa.Integer, nullable=False, server_default="0"),
        sa.Column("chain_status", sa.String(20), nullable=False, server_default="initialized"),
        sa.Column("consensus_type", sa.String(32), nullable=True),
        sa.Column("storage_type", sa.String(32), nullable=True),
        sa.Column("deploy_type", sa.String(20), nullable=False, server_default="api"),
        sa.Column("remark", sa.String(1024), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "tb_group",
        sa.Column("group_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("chain_id", sa.Integer, _chain_fk(), primary_key=True),
        sa.Column("group_name", sa.String(64), nullable=False),
        sa.Column("node_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("description", sa.String(1024), nullable=True),
        sa.Column("group_type", sa.String(20), nullable=False, server_default="deploy"),
        sa.Column("group_status", sa.String(20), nullable=False, server_default="normal"),
        *_timestamps(),
    )

    op.create_table(
        "tb_node",
        sa.Column("node_id", sa.String(250), primary_key=True),
        sa.Column("chain_id", sa.Integer, _chain_fk(), primary_key=True),
        sa.Column("group_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("node_name", sa.String(255), nullable=False),
        sa.Column("node_ip", sa.String(64), nullable=True),
        sa.Column("p2p_port", sa.Integer, nullable=True),
        sa.Column("description", sa.String(1024), nullable=True),
        sa.Column("node_active", sa.String(20), nullable=False, server_default="invalid"),
        *_timestamps(),
    )

    op.create_table(
        "tb_front",
        sa.Column("front_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("chain_id", sa.Integer, _chain_fk(), nullable=False),
        sa.Column("node_id", sa.String(250), nullable=False),
        sa.Column("front_ip", sa.String(64), nullable=False),
        sa.Column("front_port", sa.Integer, nullable=False),
        sa.Column("jsonrpc_port", sa.Integer, nullable=False),
        sa.Column("p2p_port", sa.Integer, nullable=False),
        sa.Column("channel_port", sa.Integer, nullable=False),
        sa.Column("chain_name", sa.String(120), nullable=False),
        sa.Column("ext_company_id", sa.Integer, nullable=True),
        sa.Column("ext_org_id", sa.Integer, nullable=True),
        sa.Column("ext_host_id", sa.Integer, nullable=True),
        sa.Column("agency", sa.String(64), nullable=True),
        sa.Column("description", sa.String(1024), nullable=True),
        sa.Column("front_status", sa.String(20), nullable=False, server_default="initialized"),
        sa.Column("version", sa.String(64), nullable=False, server_default=""),
        sa.Column("container_name", sa.String(255), nullable=False),
        sa.Column("host_index", sa.Integer, nullable=False),
        sa.Column("ssh_user", sa.String(64), nullable=False),
        sa.Column("ssh_port", sa.Integer, nullable=False),
        sa.Column("docker_port", sa.Integer, nullable=False),
        sa.Column("root_on_host", sa.String(255), nullable=False),
        sa.Column("node_root_on_host", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tb_front_chain_id", "tb_front", ["chain_id"])

    op.create_table(
        "tb_front_group_map",
        sa.Column("map_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("chain_id", sa.Integer, _chain_fk(), nullable=False),
        sa.Column(
            "front_id", sa.Integer,
            sa.ForeignKey("tb_front.front_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("group_id", sa.Integer, nullable=False),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("chain_id", "front_id", "group_id", name="uq_front_group_map"),
    )
    op.create_index("ix_tb_front_group_map_chain_id", "tb_front_group_map", ["chain_id"])

    op.create_table(
        "tb_contract",
        sa.Column("contract_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("chain_id", sa.Integer, _chain_fk(), nullable=False),
        sa.Column("group_id", sa.Integer, nullable=False),
        sa.Column("contract_name", sa.String(120), nullable=False),
        sa.Column("contract_path", sa.String(255), nullable=False, server_default="/"),
        sa.Column("contract_source", sa.Text, nullable=True),
        sa.Column("contract_abi", sa.Text, nullable=True),
        sa.Column("bytecode_bin", sa.Text, nullable=True),
        sa.Column("contract_address", sa.String(64), nullable=True),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_tb_contract_chain_id", "tb_contract", ["chain_id"])


def downgrade() -> None:
    op.drop_index("ix_tb_contract_chain_id", table_name="tb_contract")
    op.drop_table("tb_contract")
    op.drop_index("ix_tb_front_group_map_chain_id", table_name="tb_front_group_map")
    op.drop_table("tb_front_group_map")
    op.drop_index("ix_tb_front_chain_id", table_name="tb_front")
    op.drop_table("tb_front")
    op.drop_table("tb_node")
    op.drop_table("tb_group")
    op.drop_table("tb_chain")
