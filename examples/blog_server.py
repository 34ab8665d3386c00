"""
=============================================================================
EXAMPLE: BLOG SITE
=============================================================================

A small blog mounted under /blog, showing the pieces of tollgate working
together:

1. Configuration (base prefix, views, layout, cookie secret)
2. A symbol filter that loads the blog once for every route using :blog_id
3. restify() for the comments resource
4. redirect()/error() signals and flash messages across a redirect
5. The per-application cache

ROUTES:
───────

    GET    /blog                         → list_blogs()
    GET    /blog/blogs/:blog_id          → show_blog(blog_id)
    POST   /blog/blogs                   → create_blog()
    DELETE /blog/blogs/:blog_id          → delete_blog(blog_id)
    GET    /blog/blogs/:blog_id/comments → Comments.index
    POST   /blog/blogs/:blog_id/comments → Comments.create
    DELETE /blog/blogs/:blog_id/comments/:id → Comments.delete
    GET    /blog/admin/*                 → admin(rest)

Try it:

    python examples/blog_server.py
    curl http://localhost:8080/blog/blogs/1
    curl -X POST -d "title=Hello" http://localhost:8080/blog/blogs
    curl -X POST -d "_method=DELETE" http://localhost:8080/blog/blogs/1

=============================================================================
"""

import sys
from pathlib import Path

# =============================================================================
# PATH SETUP
# =============================================================================
# Run from a checkout without installing the package first.

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tollgate import (
    Application,
    Config,
    cache,
    error,
    flash,
    params,
    redirect,
    render,
    stash,
)
from tollgate.http import created, no_content


# =============================================================================
# IN-MEMORY DATABASE
# =============================================================================
# Not thread-safe; a real site would use a database.

blogs_db: dict[int, dict] = {
    1: {"id": 1, "title": "First post", "comments": []},
    2: {"id": 2, "title": "Second post", "comments": []},
}
next_id = 3


config = Config({
    "dispatch.router": "blog",
    "dispatch.url": "http://localhost:8080/blog",
    "dispatch.views": str(Path(__file__).parent / "views"),
    "dispatch.layout": "layout.html",
    "cookies.secret": "change-me",
})
app = Application(config)


# =============================================================================
# FILTERS
# =============================================================================
# Runs before every handler whose route contains :blog_id, so the handlers
# never look the blog up themselves.

@app.filter("blog_id")
def load_blog(blog_id):
    if not blog_id.isdigit():
        error(400, "Blog ids are numeric")
    blog = blogs_db.get(int(blog_id))
    if blog is None:
        error(404, f"No blog {blog_id}")
    stash("blog", blog)


@app.error_handler(404)
def missing_blog(code, message):
    return render("error.html", {"code": code, "message": message})


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/", name="home")
def list_blogs():
    titles = cache("titles", lambda: [b["title"] for b in blogs_db.values()], ttl=30)
    return render("index.html", {"titles": titles, "notice": flash("notice")})


@app.get("/blogs/:blog_id", name="blog")
def show_blog(blog_id):
    return stash("blog")


@app.post("/blogs")
def create_blog():
    global next_id
    title = params("title")
    if not title:
        error(400, "title is required")

    blog = {"id": next_id, "title": title, "comments": []}
    blogs_db[next_id] = blog
    next_id += 1
    app.invalidate("titles")
    return created(blog, location=app.url_for("blog", blog_id=blog["id"]))


@app.delete("/blogs/:blog_id")
def delete_blog(blog_id):
    del blogs_db[stash("blog")["id"]]
    app.invalidate("titles")
    flash("notice", f"Deleted blog {blog_id}")
    redirect(303, app.url_for("home"))


@app.get("/admin/*rest")
def admin(rest):
    redirect(app.url_for("home"), condition=params("token") != "letmein")
    return {"admin": rest}


# =============================================================================
# RESOURCES
# =============================================================================

class Comments:
    """Nested resource: only the actions defined here are routed."""

    def index(self, blog_id):
        return stash("blog")["comments"]

    def create(self, blog_id):
        text = params("text")
        if not text:
            error(400, "text is required")
        stash("blog")["comments"].append(text)
        return created({"text": text})

    def delete(self, blog_id, id):
        comments = stash("blog")["comments"]
        if not id.isdigit() or int(id) >= len(comments):
            error(404, f"No comment {id}")
        comments.pop(int(id))
        return no_content()


app.restify("/blogs/:blog_id/comments", Comments())


if __name__ == "__main__":
    app.run(port=8080)
