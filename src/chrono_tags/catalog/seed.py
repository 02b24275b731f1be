"""
Built-in tag catalog.

The tags whose conditions can be expressed over
:class:`~chrono_tags.metrics.snapshot.UserMetricsSnapshot`, in catalog
order. Ids are the stable identifiers persisted in ``user_tags``.

Tags:
    catalog, seed, defaults, chrono-tags
"""

from __future__ import annotations

from chrono_tags.catalog.definitions import TagDefinition
from chrono_tags.catalog.predicates import Comparison, Deadline, Elapsed, Flag, Predicate
from chrono_tags.core.enums import TagCategory, Visibility

NEWCOMER_DAYS = 7
WARNING_EXPIRY_DAYS = 60
POPULAR_REACTIONS = 5000
VETERAN_DAYS = 365
VETERAN_POSTS = 100
SPAM_POSTS = 5
VIRAL_REACTIONS = 10
INFLUENCER_FOLLOWERS = 5
PROLIFIC_POSTS = 10
CREATOR_POSTS = 5


class TagIds:
    """Stable ids of the built-in tags."""

    VERIFICADO = "00000000-0000-0000-0000-000000000001"
    RECEM_CHEGADO = "00000000-0000-0000-0000-000000000002"
    POPULAR = "00000000-0000-0000-0000-000000000003"
    ADVERTIDO = "00000000-0000-0000-0000-000000000004"
    SILENCIADO = "00000000-0000-0000-0000-000000000005"
    BANIDO = "00000000-0000-0000-0000-000000000009"
    SPAM = "00000000-0000-0000-0000-000000000010"
    GOLPISTA = "00000000-0000-0000-0000-000000000011"
    VETERANO = "00000000-0000-0000-0000-000000000014"
    FUNDADOR = "00000000-0000-0000-0000-000000000015"

    # profile auto-tags
    VIRAL = "00000000-0000-0000-0000-000000000101"
    INFLUENTE = "00000000-0000-0000-0000-000000000102"
    ATIVO = "00000000-0000-0000-0000-000000000103"
    PROLIFICO = "00000000-0000-0000-0000-000000000104"
    CRIADOR = "00000000-0000-0000-0000-000000000105"
    APOIADOR = "00000000-0000-0000-0000-000000000106"


DEFAULT_TAGS: tuple[TagDefinition, ...] = (
    # ── Positive ─────────────────────────────────────────────────
    TagDefinition(
        id=TagIds.VERIFICADO,
        name="Verificado",
        category=TagCategory.POSITIVE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate(conditions=(Flag("is_verified"),), manual=True),
        removal=Predicate.manual_only(),
        notify_on_acquire=True,
        description="Identidade confirmada pela Chrono",
        display_priority=10,
    ),
    TagDefinition(
        id=TagIds.POPULAR,
        name="Popular",
        category=TagCategory.POSITIVE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(
            Comparison("reactions_received", ">=", POPULAR_REACTIONS)
        ),
        notify_on_acquire=True,
        description="Conteúdo amplamente apreciado pela comunidade",
        display_priority=9,
    ),
    TagDefinition(
        id=TagIds.VIRAL,
        name="Viral",
        category=TagCategory.POSITIVE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("reactions_received", ">", VIRAL_REACTIONS)),
        description="Publicações que chamaram a atenção",
        display_priority=4,
    ),
    TagDefinition(
        id=TagIds.INFLUENTE,
        name="Influente",
        category=TagCategory.POSITIVE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("followers", ">", INFLUENCER_FOLLOWERS)),
        description="Seguido por vários membros",
        display_priority=4,
    ),
    # ── Moderation ───────────────────────────────────────────────
    TagDefinition(
        id=TagIds.ADVERTIDO,
        name="Advertido",
        category=TagCategory.MODERATION,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.manual_only(),
        removal=Predicate.all_of(
            Elapsed("last_warning_at", ">", WARNING_EXPIRY_DAYS)
        ),
        notify_on_acquire=True,
        notify_on_remove=True,
        description="Recebeu aviso oficial por violação de regras",
        display_priority=10,
    ),
    TagDefinition(
        id=TagIds.SILENCIADO,
        name="Silenciado",
        category=TagCategory.MODERATION,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Deadline("silenced_until", pending=True)),
        removal=Predicate.all_of(Deadline("silenced_until", pending=False)),
        notify_on_acquire=True,
        notify_on_remove=True,
        description="Permissões de postagem temporariamente restritas",
        display_priority=10,
    ),
    TagDefinition(
        id=TagIds.BANIDO,
        name="Banido",
        category=TagCategory.MODERATION,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Flag("overrides.banned")),
        removal=Predicate.manual_only(),
        description="Conta banida permanentemente",
        display_priority=10,
    ),
    TagDefinition(
        id=TagIds.SPAM,
        name="Spam",
        category=TagCategory.MODERATION,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(
            Flag("overrides.spam"),
            Comparison("spam_posts", ">=", SPAM_POSTS),
        ),
        removal=Predicate.manual_only(),
        notify_on_acquire=True,
        notify_on_remove=True,
        description="Padrão de spam detectado",
        display_priority=9,
    ),
    TagDefinition(
        id=TagIds.GOLPISTA,
        name="Golpista",
        category=TagCategory.MODERATION,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Flag("overrides.fraudulent")),
        removal=Predicate.manual_only(),
        notify_on_acquire=True,
        description="Atividade fraudulenta confirmada",
        display_priority=10,
    ),
    # ── Time ─────────────────────────────────────────────────────
    TagDefinition(
        id=TagIds.RECEM_CHEGADO,
        name="Recém-chegado",
        category=TagCategory.TIME,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Elapsed("created_at", "<=", NEWCOMER_DAYS)),
        removal=Predicate.all_of(Elapsed("created_at", ">", NEWCOMER_DAYS)),
        description="Novo membro da comunidade",
        display_priority=5,
    ),
    TagDefinition(
        id=TagIds.ATIVO,
        name="Ativo",
        category=TagCategory.TIME,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("total_posts", ">", 0)),
        description="Já publicou na comunidade",
        display_priority=3,
    ),
    TagDefinition(
        id=TagIds.PROLIFICO,
        name="Prolífico",
        category=TagCategory.TIME,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("total_posts", ">", PROLIFIC_POSTS)),
        description="Publica com frequência",
        display_priority=4,
    ),
    TagDefinition(
        id=TagIds.VETERANO,
        name="Veterano",
        category=TagCategory.TIME,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(
            Elapsed("created_at", ">", VETERAN_DAYS),
            Comparison("total_posts", ">=", VETERAN_POSTS),
        ),
        notify_on_acquire=True,
        description="Membro de longa data com participação constante",
        display_priority=8,
    ),
    TagDefinition(
        id=TagIds.FUNDADOR,
        name="Fundador",
        category=TagCategory.TIME,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Flag("overrides.founder")),
        removal=Predicate.manual_only(),
        notify_on_acquire=True,
        description="Membro fundador da Chrono",
        display_priority=10,
    ),
    # ── Style ────────────────────────────────────────────────────
    TagDefinition(
        id=TagIds.CRIADOR,
        name="Criador",
        category=TagCategory.STYLE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("total_posts", ">", CREATOR_POSTS)),
        description="Prefere criar a apenas acompanhar",
        display_priority=3,
    ),
    TagDefinition(
        id=TagIds.APOIADOR,
        name="Apoiador",
        category=TagCategory.STYLE,
        visibility=Visibility.PUBLIC,
        acquisition=Predicate.all_of(Comparison("likes_given", ">", 0)),
        description="Reage ao conteúdo de outros membros",
        display_priority=2,
    ),
)


__all__ = [
    "CREATOR_POSTS",
    "DEFAULT_TAGS",
    "INFLUENCER_FOLLOWERS",
    "NEWCOMER_DAYS",
    "POPULAR_REACTIONS",
    "PROLIFIC_POSTS",
    "SPAM_POSTS",
    "TagIds",
    "VETERAN_DAYS",
    "VETERAN_POSTS",
    "VIRAL_REACTIONS",
    "WARNING_EXPIRY_DAYS",
]
