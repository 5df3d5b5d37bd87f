from functools import wraps
from flask import current_app, redirect, render_template
from portal.services.policy import current_resolver
from portal.services.navigation import LOGIN_ROUTE


def with_role_protection(view, required_permission: str):
    """Wrap ``view`` so it only runs for users holding ``required_permission``.

    No session -> redirect to login. Session without the permission -> 403 Access
    Denied page naming the permission and the user's role. Otherwise the view is
    called with its original arguments.
    """
    @wraps(view)
    def protected(*args, **kwargs):
        resolver = current_resolver()
        user = resolver.get_current_user()
        if user is None:
            return redirect(LOGIN_ROUTE)
        if not resolver.can_access_page(required_permission):
            current_app.logger.info(
                'Access denied: user=%s role=%s required=%s', user.id, user.role, required_permission
            )
            body = render_template(
                'access_denied.html',
                required_permission=required_permission,
                user_role=user.role,
                default_route=resolver.get_default_route(),
            )
            return body, 403
        return view(*args, **kwargs)

    protected.required_permission = required_permission
    return protected


def require_page(required_permission: str):
    def outer(fn):
        return with_role_protection(fn, required_permission)
    return outer
