import streamlit as st


def render_splash():
    st.markdown(
        """
        <div style="display:flex;flex-direction:column;align-items:center;justify-content:center;height:60vh;">
          <div style="font-size:64px;font-weight:800;color:#1e2c4b;">EZTeach</div>
          <div style="color:#6b7a99;">Loading...</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
