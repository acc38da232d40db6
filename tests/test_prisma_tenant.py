"""Unit tests for the Prisma tenant-isolation rules."""

import asyncio

import pytest

from vibecheck.config import Config
from vibecheck.context import ScanContext
from vibecheck.findings.models import Severity
from vibecheck.rules.prisma_tenant import (
    PER_FILE_CAP,
    PrismaMissingTenantFilterRule,
    PrismaTenantRule,
    PrismaWriteTenantBoundaryRule,
)


def _run_rule(rule, tmp_path, rel, code, config=None):
    p = tmp_path / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(code)
    ctx = ScanContext(tmp_path, [p], config)
    return asyncio.run(rule.detect(ctx))


def test_read_without_tenant_key_is_info(tmp_path):
    code = "const rows = await prisma.invoice.findMany({\n  where: { status: 'open' },\n});\n"
    findings = _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "app/api/invoices/route.ts", code)
    assert len(findings) == 1
    f = findings[0]
    assert f.severity is Severity.INFO
    assert "findMany" in f.message
    assert (f.line, f.col) == (1, 34)


def test_read_with_tenant_key_is_clean(tmp_path):
    code = "await prisma.invoice.findFirst({ where: { id, workspaceId: ws.id } });\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "lib/server/q.ts", code) == []


def test_variable_argument_skipped(tmp_path):
    code = "const args = { where: { status: 'x' } };\nawait prisma.invoice.findMany(args);\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "server/q.ts", code) == []


def test_no_where_clause_skipped(tmp_path):
    code = "await prisma.invoice.findMany({ take: 10 });\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "server/q.ts", code) == []


def test_tenant_ok_marker_suppresses(tmp_path):
    code = "// vibecheck:tenant-ok\nawait prisma.plan.findMany({ where: { public: true } });\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "server/plans.ts", code) == []


def test_outside_tenant_paths_skipped(tmp_path):
    code = "await prisma.invoice.findMany({ where: { status: 'open' } });\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "app/dashboard/page.tsx", code) == []


def test_custom_tenant_keys(tmp_path):
    code = "await prisma.doc.findMany({ where: { companyId: c } });\n"
    config = Config(tenant_keys=["companyId"])
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "server/d.ts", code, config) == []


def test_client_component_prisma_is_high(tmp_path):
    code = '"use client";\nimport { prisma } from "@/lib/db";\nprisma.user.findMany({ where: {} });\n'
    findings = _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "app/components/list.tsx", code)
    assert len(findings) == 1
    assert findings[0].severity is Severity.HIGH
    assert findings[0].line == 3


def test_cap_per_file(tmp_path):
    code = "\n".join("prisma.a.findMany({ where: { x: 1 } });" for _ in range(PER_FILE_CAP + 4))
    findings = _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "server/many.ts", code)
    assert len(findings) == PER_FILE_CAP


def test_write_boundary_flags_bulk_writes(tmp_path):
    code = (
        "await prisma.task.updateMany({ where: { done: false }, data: { done: true } });\n"
        "await prisma.task.deleteMany({ where: { orgId, done: true } });\n"
        "await prisma.task.update({ where: { id } });\n"
    )
    findings = _run_rule(PrismaWriteTenantBoundaryRule(), tmp_path, "app/api/tasks/route.ts", code)
    assert len(findings) == 1
    assert "updateMany" in findings[0].message
    assert findings[0].rule_id == "prisma-write-tenant-boundary"


def test_unbalanced_call_never_raises(tmp_path):
    code = "await prisma.task.deleteMany({ where: { done: true }\n"
    assert _run_rule(PrismaWriteTenantBoundaryRule(), tmp_path, "server/t.ts", code) == []


def test_write_boundary_checks_aliased_client(tmp_path):
    code = "await db.post.deleteMany({ where: { published: false } });\n"
    findings = _run_rule(PrismaWriteTenantBoundaryRule(), tmp_path, "app/api/posts/route.ts", code)
    assert len(findings) == 1
    assert "deleteMany" in findings[0].message


def test_read_rule_requires_prisma_reference(tmp_path):
    code = "await db.post.findMany({ where: { published: true } });\n"
    assert _run_rule(PrismaMissingTenantFilterRule(), tmp_path, "app/api/posts/route.ts", code) == []


def test_tenant_rule_base_is_abstract():
    with pytest.raises(TypeError):
        PrismaTenantRule()
