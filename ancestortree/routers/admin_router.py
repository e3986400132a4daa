import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ancestortree.auth import require_admin
from ancestortree.core.actors import ANONYMOUS, Actor
from ancestortree.core.audit import evaluate_corpus
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.privacy_defaults import sweep_people
from ancestortree.core.records import as_record, db_lookup, fetch_by_kind
from ancestortree.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/privacy", tags=["Admin"])


@router.post("/sweep")
def run_privacy_sweep(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    changed = sweep_people(db, engine.config)
    logger.info("Privacy sweep run by %s changed %d people", actor, changed)
    return {"updated": changed, "policy_version": engine.config.version}


@router.get("/audit")
def run_privacy_audit(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    corpus = [
        (kind, as_record(row))
        for kind in RecordKind
        for row in fetch_by_kind(db, kind)
    ]
    actors = [ANONYMOUS, Actor.member("audit-member"), actor]

    violations = evaluate_corpus(corpus, actors, engine=engine, lookup=db_lookup(db))
    if violations:
        logger.warning("Privacy audit found %d violations", len(violations))

    return {
        "policy_version": engine.config.version,
        "records_checked": len(corpus),
        "violations": [v.as_dict() for v in violations],
    }
