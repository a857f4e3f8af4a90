# Services package init
"""
Project Library Backend - Services Layer
=========================================

What:  Business rules between the routes (HTTP) and the database.
How:   Each service is a stateless class with a module-level singleton. Every
       method takes the request's AsyncSession as its first argument, raises
       application exceptions, and flushes (never commits) its writes.

Service Inventory:
    - OwnerService:   owner lookups and active-owner resolution
    - AuthService:    signup and credential checks
    - UserService:    user profile reads and updates
    - FollowService:  follow edges, follower/following lists, counts
    - MessageService: direct messages, read receipts, conversations
    - OrgService:     orgs, memberships, org profile
    - ImageService:   image metadata and attachments
    - ProjectService / EventService: owner-scoped content CRUD
    - TopicService:   topic taxonomy (see taxonomy.py for the pure helpers)
"""
