from __future__ import annotations

import logging
from typing import Sequence

from ..context import BuildCtx
from ..lib import docs, gitea
from ..lib.package_lists import generate_package_doc

logger = logging.getLogger(__name__)


class UpdateTodoTarget:
    target_id = "update_todo"
    description = "update TODO.md by fetching issues from the main gitea instance API"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        url = ctx.cfg.gitea_url
        if not url:
            raise ValueError("No Gitea URL configured (gitea.url or GITEA_URL)")
        repo = ctx.cfg.gitea_repo
        out = ctx.doc_source_dir / "TODO.md"
        if ctx.dry_run:
            logger.info("Would fetch issues of %s from %s into %s", repo, url, out)
            return
        issues = gitea.fetch_issues(url, repo, token=ctx.cfg.gitea_token, verify=ctx.cfg.gitea_verify_tls)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(gitea.render_todo(repo, issues), encoding="utf-8")
        logger.info("Wrote %s (%d issues)", out, len(issues))


class InstallDevDocsTarget:
    target_id = "install_dev_docs"
    description = "install documentation generator (sphinx + markdown + theme)"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        docs.create_venv(ctx.venv_dir, ctx.cfg.doc_packages, dry_run=ctx.dry_run)


class DocMdTarget:
    target_id = "doc_md"
    description = "generate markdown documentation"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        docs.copy_markdown_sources(ctx.root, ctx.doc_source_dir, dry_run=ctx.dry_run)
        docs.strip_doc_prefix(ctx.doc_source_dir, ctx.cfg.doc_source_dir, dry_run=ctx.dry_run)


class DocPackageListsTarget:
    target_id = "doc_package_lists"
    description = "generate markdown package list from config/package-lists/"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        lists_dir = ctx.path(ctx.cfg.package_lists_dir)
        out = ctx.doc_source_dir / "packages.md"
        if ctx.dry_run:
            logger.info("Would render %s into %s", lists_dir, out)
            return
        generate_package_doc(lists_dir, out)


class DocHtmlTarget:
    target_id = "doc_html"
    description = "HTML documentation generation (sphinx-build --help)"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        docs.sphinx_build(
            ctx.venv_dir,
            ctx.doc_source_dir,
            ctx.doc_build_dir,
            opts=ctx.cfg.sphinx_opts,
            dry_run=ctx.dry_run,
        )


class DocTarget:
    target_id = "doc"
    description = "run all documentation generation tasks"
    depends: Sequence[str] = ("install_dev_docs", "doc_package_lists", "doc_md", "doc_html")
    aggregate = True

    def run(self, ctx: BuildCtx) -> None:
        return None
