# Routes package init
"""
Project Library Backend - API Routes Package
=============================================

What:  Thin HTTP handlers: authenticate, validate the body, call one service,
       wrap the result in the `{"data", "error"}` envelope.

Route Inventory (all under /api except health):
    - auth.py:      POST /auth/signup, /auth/login, /auth/logout
    - session.py:   POST/DELETE /session/active-owner
    - me.py:        GET /me, GET/PUT /me/user, PUT /me/org
    - users.py:     GET /users/by-username/{username}
    - owners.py:    GET /owners/{id}, /followers, /following, /follow-stats
    - follows.py:   POST /follows
    - messages.py:  /messages, /inbox, /sent, /conversation/{id}, /{id}/read
    - orgs.py:      /orgs, /orgs/{id}, /orgs/by-slug/{slug}, /orgs/{id}/members
    - images.py:    /images, /image-attachments
    - topics.py:    /topics, /topics/tree
    - projects.py:  /projects CRUD, /projects/{id}/posts, /projects/{id}/entries
    - events.py:    /events CRUD, /events/{id}/posts, /events/{id}/entries
    - posts.py:     /posts CRUD
    - health.py:    GET /health
"""
