# Services package.
#
#   news_service     cached reads, create/update/delete for News + Comments
#   comment_service  read/delete of individual comments
#   renovator        patch-style merge used by NewsService.update
#
# Services receive their stores (and optionally a CacheManager) through
# the constructor; ``newsdesk.dependencies`` builds them per request on
# top of the ``get_db`` session, so the router layer controls the
# transaction boundary.
